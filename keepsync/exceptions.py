"""
This is the complete list of exceptions raised inside keepsync.

Provider lifecycle methods catch these and log them, nothing escapes one provider into another.
"""


class CloudException(Exception):                     # backend refused or failed the request
    def __init__(self, *args, original_exception=None, code=None):
        super().__init__(*args)
        self.original_exception = original_exception
        self.code = code                              # backend error code, if it sent one


class CloudFileNotFoundError(CloudException):         # 404, missing folder or remote id
    pass


class CloudFileExistsError(CloudException):           # 409, already there
    pass


class CloudTemporaryError(CloudException):            # 429, 5xx
    pass


class CloudTokenError(CloudException):                # 'creds don't work, refresh or reauth'
    pass


class CloudDisconnectedError(CloudException):         # connection refused, timeout
    pass


class StoreError(Exception):
    """Base class for persistent store failures"""
    def __init__(self, *args, original_exception=None):
        super().__init__(*args)
        self.original_exception = original_exception


class StoreLoadError(StoreError):                     # treated as 'no usable configuration'
    pass


class StoreSaveError(StoreError):                     # non fatal, state may not survive this run
    pass


class SourceFileError(ValueError):                    # fatal, bad path on the command line
    pass
