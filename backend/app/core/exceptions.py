class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )

class PlacementRejectedError(AppError):
    """Raised when a placement is committed but breaks a scheduling rule."""
    def __init__(self, outcome):
        super().__init__(outcome.reason, status_code=409, details=outcome.model_dump(mode="json", by_alias=True))
        self.outcome = outcome

class MalformedCandidateError(AppError):
    """Raised when a session is missing the fields its kind requires."""
    def __init__(self, message: str):
        super().__init__(message, status_code=422, details={"code": "malformed_candidate"})

class SnapshotVersionConflictError(AppError):
    """Raised when a snapshot changed between load and save."""
    def __init__(self, snapshot_id: int, expected_version: int, current_version: int):
        super().__init__(
            f"Snapshot {snapshot_id} is at version {current_version}, expected {expected_version}",
            status_code=409,
            details={
                "code": "stale_snapshot",
                "snapshot_id": snapshot_id,
                "expected_version": expected_version,
                "current_version": current_version,
            },
        )
