from satclass.auth.session_store import LoginResult, Session, SessionStore

__all__ = ["LoginResult", "Session", "SessionStore"]
