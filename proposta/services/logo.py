from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass
from typing import Optional

UNSUPPORTED_LOGO_MESSAGE = "Por favor, selecione um arquivo de imagem válido."


class UnsupportedLogoError(ValueError):
    """Arquivo enviado como logo do cliente não é imagem."""

    def __init__(self, filename: str, content_type: str):
        self.filename = filename
        self.content_type = content_type
        super().__init__(UNSUPPORTED_LOGO_MESSAGE)


@dataclass(frozen=True)
class LogoUpload:
    filename: str
    content_type: str
    data_url: str     # vai direto no <img src="..."> do documento


def load_logo(filename: str, content: bytes, content_type: Optional[str] = None) -> LogoUpload:
    """
    Aceita só image/*. Sem content_type informado, deduz pela extensão.
    """
    ctype = content_type or mimetypes.guess_type(filename)[0] or ""
    if not ctype.startswith("image/"):
        raise UnsupportedLogoError(filename, ctype)

    encoded = base64.b64encode(content).decode("ascii")
    return LogoUpload(
        filename=filename,
        content_type=ctype,
        data_url=f"data:{ctype};base64,{encoded}",
    )
