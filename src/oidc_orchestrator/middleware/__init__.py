from oidc_orchestrator.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
