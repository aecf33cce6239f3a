"""
Upload session (form state).
Ephemeral per-client state of the upload form: field values, the in-flight
flag, progress of the file currently uploading and the last status message.
"""
import threading
import uuid
from typing import Dict, List, Optional


class UploadSession:
    """Form state owned by one client while it submits uploads."""
    
    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.message = ""
        self._lock = threading.Lock()
        self._set_initial_values()
    
    def _set_initial_values(self) -> None:
        self.product = ""
        self.display_name = ""
        self.quantity = 1
        self.file_names: List[str] = []
        self.uploading = False
        self.progress = 0
        self.current_file: Optional[str] = None
        self.current_index = 0
        self.total_files = 0
    
    def begin(self, product: str, display_name: str, quantity: int, file_names: List[str]) -> bool:
        """
        Mark the session as uploading.
        
        Returns:
            False if a submission is already in flight for this session
        """
        with self._lock:
            if self.uploading:
                return False
            self.product = product
            self.display_name = display_name
            self.quantity = quantity
            self.file_names = list(file_names)
            self.total_files = len(file_names)
            self.uploading = True
            self.progress = 0
            self.current_index = 0
            self.current_file = None
            self.message = ""
            return True
    
    def report_progress(self, index: int, file_name: str, percent: int) -> None:
        """Record progress of the file currently uploading (index is 1-based)."""
        with self._lock:
            self.current_index = index
            self.current_file = file_name
            self.progress = percent
    
    def complete(self, message: str) -> None:
        """Reset the form after a successful submission."""
        with self._lock:
            self._set_initial_values()
            self.message = message
    
    def fail(self, message: str) -> None:
        """Keep the form values so the user can retry."""
        with self._lock:
            self.uploading = False
            self.message = message
    
    def set_message(self, message: str) -> None:
        with self._lock:
            self.message = message


class UploadSessionRegistry:
    """In-memory registry of upload sessions for this process."""
    
    def __init__(self):
        self._sessions: Dict[str, UploadSession] = {}
        self._lock = threading.Lock()
    
    def create(self) -> UploadSession:
        session = UploadSession()
        with self._lock:
            self._sessions[session.session_id] = session
        return session
    
    def get(self, session_id: str) -> Optional[UploadSession]:
        with self._lock:
            return self._sessions.get(session_id)
    
    def get_or_create(self, session_id: Optional[str]) -> UploadSession:
        """Return the named session, creating it under that id if unknown."""
        with self._lock:
            if session_id and session_id in self._sessions:
                return self._sessions[session_id]
            session = UploadSession(session_id)
            self._sessions[session.session_id] = session
            return session
    
    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
