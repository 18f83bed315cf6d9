from gatehouse.application.context.session_claims import SessionClaims

__all__ = ["SessionClaims"]
