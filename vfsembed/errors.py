class VfsembedError(Exception):
    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)

class ConfigError(VfsembedError):
    exit_code = 2


class WalkError(VfsembedError):
    exit_code = 3


class FilesystemError(VfsembedError):
    exit_code = 12

class EmitError(VfsembedError):
    exit_code = 20


class ArtifactError(VfsembedError):
    exit_code = 21
