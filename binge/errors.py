"""Etäpalvelun virheluokittelu.

BingeClient ei päästä httpx:n poikkeuksia rajapintansa yli: kaikki
siirtotason ja HTTP-tason virheet muutetaan näiksi luokiksi.
"""


class RemoteError(RuntimeError):
    kind = "remote"

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.kind} ({self.status}): {self.message}"
        return f"{self.kind}: {self.message}"


class NetworkUnavailable(RemoteError):
    """Vastausta ei saatu lainkaan."""

    kind = "network_unavailable"


class Timeout(RemoteError):
    """Pyyntö ylitti aikarajan. Ei uudelleenyritystä — käyttäjä yrittää itse."""

    kind = "timeout"


class ClientError(RemoteError):
    kind = "client_error"

    @property
    def not_found(self) -> bool:
        return self.status == 404

    @property
    def rate_limited(self) -> bool:
        return self.status == 429


class ServerError(RemoteError):
    kind = "server_error"


class Malformed(RemoteError):
    """Vastaus ei ollut JSONia tai siitä puuttui odotettu kenttä."""

    kind = "malformed"


def classify_status(status: int, message: str) -> RemoteError:
    if 400 <= status < 500:
        return ClientError(message, status)
    if status >= 500:
        return ServerError(message, status)
    return Malformed(f"odottamaton HTTP-status: {message}", status)
