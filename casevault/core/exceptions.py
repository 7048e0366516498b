from fastapi import HTTPException, status


class ContentStorageError(HTTPException):
    """Base class for every terminal failure of the content pipelines."""


class ConfigurationError(ContentStorageError):
    def __init__(self, container: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"A storage container with the name `{container}` does not exist!",
        )


class NotFoundError(ContentStorageError):
    def __init__(self, detail: str = "The requested resource does not exist"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class NoProvenanceError(ContentStorageError):
    def __init__(self, object_name: str, version_id: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Unable to find hash values for `{object_name}` (version `{version_id}`)!",
        )
        self.object_name = object_name
        self.version_id = version_id


class IntegrityError(ContentStorageError):
    def __init__(self, object_name: str, algorithm: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{algorithm} hash verification failed for: `{object_name}`!",
        )
        self.object_name = object_name
        self.algorithm = algorithm


class TransientIOError(ContentStorageError):
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"The object store returned an error: `{message}`",
        )


class ConflictError(ContentStorageError):
    def __init__(self, file_names: list[str]):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"The following file names already exist; `{','.join(file_names)}`, "
                "please rename them and try again!"
            ),
        )
        self.file_names = file_names


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Invalid or missing authentication"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
