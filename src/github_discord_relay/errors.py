class RelayError(RuntimeError):
    pass


class ConfigError(RelayError):
    pass


class FetchError(RelayError):
    pass


class CursorWriteError(RelayError):
    pass


class DeliveryError(RelayError):
    pass
