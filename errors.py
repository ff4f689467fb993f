class ConversionError(Exception):
    pass


class SourceNotFound(ConversionError):
    def __init__(self, kind, path):
        super().__init__(f"{kind} file not found: {path}")
        self.path = path


class StoreOpenFailed(ConversionError):
    pass


class MissingParentError(ConversionError):
    def __init__(self, node_name, parent):
        super().__init__(f"Node {node_name!r} references parent {parent!r} which was never resolved")
        self.node_name = node_name
        self.parent = parent


class DuplicatePathError(ConversionError):
    def __init__(self, path):
        super().__init__(f"Duplicate node path: {path}")
        self.path = path


class InvalidNodeName(ConversionError):
    def __init__(self, node_name):
        super().__init__(f"Node name {node_name!r} is not a valid USD prim name")
        self.node_name = node_name


class ConfigurationError(ConversionError):
    pass


class DecodeError(ConversionError):
    pass


class AuthoringFailed(ConversionError):
    pass
