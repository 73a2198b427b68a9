from typing import Optional, Dict, Any


class NewsAggregatorError(Exception):
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class NoPreferencesError(NewsAggregatorError):
    def __init__(self, user_id: Optional[int] = None):
        super().__init__(
            message="Please set your news preferences first",
            error_code="NO_PREFERENCES",
            details={"user_id": user_id} if user_id is not None else None
        )


class MissingQueryError(NewsAggregatorError):
    def __init__(self, field: str = "query"):
        super().__init__(
            message=f"Search {field} is required",
            error_code="MISSING_QUERY",
            details={"field": field}
        )


class FetchError(NewsAggregatorError):
    pass


class ProviderUnconfiguredError(FetchError):
    def __init__(self):
        super().__init__(
            message="News API is not configured. Please set NEWS_API_KEY in .env file",
            error_code="PROVIDER_UNCONFIGURED"
        )


class FetchTimeoutError(FetchError):
    def __init__(self, timeout_seconds: float):
        super().__init__(
            message="Request timeout while fetching news",
            error_code="FETCH_TIMEOUT",
            details={"timeout_seconds": timeout_seconds}
        )


class ProviderError(FetchError):
    def __init__(self, details: str, status_code: Optional[int] = None):
        super().__init__(
            message="News provider request failed",
            error_code="PROVIDER_ERROR",
            details={"details": details, "status_code": status_code}
        )

    @property
    def upstream_details(self) -> str:
        return self.details.get("details", "")


class AuthenticationError(NewsAggregatorError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, error_code="AUTHENTICATION_FAILED")


class UserExistsError(NewsAggregatorError):
    def __init__(self, email: str):
        super().__init__(
            message="User already exists with this email",
            error_code="USER_EXISTS",
            details={"email": email}
        )
