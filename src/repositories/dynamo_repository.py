"""
DynamoDB Repository for upload records.
Handles create, read and partial updates of upload records in DynamoDB.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from src.core import config
from src.core.exceptions import (
    PersistenceException,
    RecordNotFoundException,
    SubscriptionException,
    TransitionNotAllowedException
)
from src.models.label_status import LabelStatus
from src.models.upload_record import LabelFile, UploadRecord
from src.repositories.record_repository import RecordRepository, SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

CREATED_AT_INDEX = 'CreatedAtIndex'

# Domain attribute -> stored attribute
FIELD_NAMES = {
    'product': 'producto',
    'legacy_type': 'tipo',
    'display_name': 'nombre',
    'quantity': 'cantidad',
    'files': 'archivos',
    'created_at': 'creadoEn',
    'status': 'estado',
    'printed_at': 'impresoEn',
    'shipped_at': 'enviadoEn',
    'dispatched_at': 'despachadoEn',
}

ACCESS_DENIED_CODES = {'AccessDeniedException', 'UnauthorizedOperation'}


class DynamoRepository(RecordRepository):
    """Repository for upload records stored in DynamoDB."""
    
    def __init__(self):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table = self.dynamodb.Table(config.settings.labels_table_name)
        self.collection = config.settings.labels_collection
    
    def create(self, record: UploadRecord) -> str:
        """
        Save a new upload record.
        
        The repository assigns the record id and the creation timestamp and
        sets both on the given record.
        
        Args:
            record: UploadRecord domain model
            
        Returns:
            The new record id
            
        Raises:
            PersistenceException: If save operation fails
        """
        record_id = str(uuid.uuid4())
        created_at = self._now()
        
        try:
            item = {
                'record_id': record_id,
                'coleccion': self.collection,
                'producto': record.product,
                'tipo': record.product,
                'nombre': record.display_name or '',
                'cantidad': int(record.quantity),
                'archivos': [self._file_to_item(f) for f in record.files],
                'creadoEn': self._format_timestamp(created_at),
                'estado': record.status.value,
                'impresoEn': None,
                'enviadoEn': None,
                'despachadoEn': None
            }
            
            self.table.put_item(
                Item=item,
                ConditionExpression='attribute_not_exists(record_id)'
            )
            
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to create upload record: error={e}")
            raise PersistenceException(f"Failed to create upload record: {str(e)}") from e
        except Exception as e:
            logger.exception("Unexpected error creating upload record")
            raise PersistenceException(f"Unexpected error creating upload record: {str(e)}") from e
        
        record.record_id = record_id
        record.created_at = created_at
        record.legacy_type = record.product
        return record_id
    
    def get_by_id(self, record_id: str) -> Optional[UploadRecord]:
        """
        Retrieve an upload record by id.
        
        Returns:
            UploadRecord or None if not found
            
        Raises:
            PersistenceException: If the read fails or the item cannot be parsed
        """
        try:
            response = self.table.get_item(Key={'record_id': record_id})
        except (ClientError, BotoCoreError) as e:
            raise PersistenceException(f"Failed to get upload record: {str(e)}") from e
        
        if 'Item' not in response:
            return None
        try:
            return self._item_to_record(response['Item'])
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceException(f"Unreadable upload record '{record_id}': {str(e)}") from e
    
    def find_recent(self, limit: int = 50) -> List[UploadRecord]:
        """
        Retrieve the most recently created records, newest first.
        
        Args:
            limit: Maximum number of records
            
        Returns:
            List of UploadRecord objects ordered by creation time descending
            (items that cannot be parsed are logged and left out)
            
        Raises:
            SubscriptionException: If read permission is denied
            PersistenceException: If the query fails
        """
        try:
            response = self.table.query(
                IndexName=CREATED_AT_INDEX,
                KeyConditionExpression='coleccion = :c',
                ExpressionAttributeValues={':c': self.collection},
                ScanIndexForward=False,
                Limit=limit
            )
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', 'Unknown')
            if code in ACCESS_DENIED_CODES:
                raise SubscriptionException(f"Read permission denied on upload records: {code}") from e
            raise PersistenceException(f"Failed to query upload records: {str(e)}") from e
        except BotoCoreError as e:
            raise PersistenceException(f"Failed to query upload records: {str(e)}") from e
        
        records = []
        for item in response.get('Items', []):
            try:
                records.append(self._item_to_record(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable upload record {item.get('record_id')}: {str(e)}")
        return records
    
    def update(self, record_id: str, updates: dict, expected_status: Optional[LabelStatus] = None) -> UploadRecord:
        """
        Update record fields.
        
        Args:
            record_id: Record identifier
            updates: Domain attribute names to new values; SERVER_TIMESTAMP
                values are replaced with the current time
            expected_status: Apply only if the stored status still equals this
            
        Returns:
            The updated record
            
        Raises:
            RecordNotFoundException: If the record does not exist
            TransitionNotAllowedException: If the stored status changed meanwhile
            PersistenceException: If the update fails
        """
        update_expression = "SET "
        expression_values = {}
        expression_names = {'#record_id': 'record_id'}
        
        for key, value in updates.items():
            stored = FIELD_NAMES.get(key, key)
            update_expression += f"#{stored} = :{stored}, "
            expression_values[f":{stored}"] = self._to_stored_value(value)
            expression_names[f"#{stored}"] = stored
        
        update_expression = update_expression.rstrip(", ")
        
        condition = "attribute_exists(#record_id)"
        if expected_status is not None:
            expression_names['#estado'] = 'estado'
            expression_values[':estado_esperado'] = expected_status.value
            status_check = "#estado = :estado_esperado"
            if expected_status is LabelStatus.PENDING:
                status_check = f"(attribute_not_exists(#estado) OR {status_check})"
            condition = f"{condition} AND {status_check}"
        
        try:
            response = self.table.update_item(
                Key={'record_id': record_id},
                UpdateExpression=update_expression,
                ConditionExpression=condition,
                ExpressionAttributeNames=expression_names,
                ExpressionAttributeValues=expression_values,
                ReturnValues='ALL_NEW'
            )
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', 'Unknown')
            if code == 'ConditionalCheckFailedException':
                self._raise_condition_failure(record_id)
            logger.error(f"Failed to update upload record: record_id={record_id}, error={code}")
            raise PersistenceException(f"Failed to update upload record: {str(e)}") from e
        except BotoCoreError as e:
            raise PersistenceException(f"Failed to update upload record: {str(e)}") from e
        
        return self._item_to_record(response['Attributes'])
    
    def _raise_condition_failure(self, record_id: str) -> None:
        if self.get_by_id(record_id) is None:
            raise RecordNotFoundException(f"Upload record '{record_id}' not found")
        raise TransitionNotAllowedException(f"Upload record '{record_id}' status changed concurrently")
    
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)
    
    def _format_timestamp(self, value: datetime) -> str:
        # Fixed width keeps the stored strings sortable
        return value.isoformat(timespec="microseconds")
    
    def _to_stored_value(self, value):
        if value is SERVER_TIMESTAMP:
            return self._format_timestamp(self._now())
        if isinstance(value, LabelStatus):
            return value.value
        if isinstance(value, datetime):
            return self._format_timestamp(value)
        return value
    
    def _file_to_item(self, label_file: LabelFile) -> dict:
        return {
            'name': label_file.file_name,
            'url': label_file.download_url,
            'path': label_file.storage_path,
            'bytes': int(label_file.size_bytes)
        }
    
    def _item_to_record(self, item: dict) -> UploadRecord:
        """Convert DynamoDB item to UploadRecord domain model."""
        return UploadRecord(
            record_id=item['record_id'],
            product=item.get('producto') or '',
            legacy_type=item.get('tipo'),
            display_name=item.get('nombre') or '',
            quantity=int(item.get('cantidad', 0)),
            files=[
                LabelFile(
                    file_name=f.get('name', ''),
                    download_url=f.get('url', ''),
                    storage_path=f.get('path', ''),
                    size_bytes=int(f.get('bytes', 0))
                )
                for f in item.get('archivos', [])
            ],
            created_at=self._parse_timestamp(item.get('creadoEn')),
            status=LabelStatus.parse(item.get('estado')),
            printed_at=self._parse_timestamp(item.get('impresoEn')),
            shipped_at=self._parse_timestamp(item.get('enviadoEn')),
            dispatched_at=self._parse_timestamp(item.get('despachadoEn'))
        )
    
    def _parse_timestamp(self, value) -> Optional[datetime]:
        if not value:
            return None
        return datetime.fromisoformat(value)
