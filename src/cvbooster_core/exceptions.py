"""
异常定义 - CVBooster核心库使用的错误类型
"""


class CVBoosterError(Exception):
    """Base class for all CVBooster core errors"""


class DocumentNotFoundError(CVBoosterError):
    """The document does not exist or is not owned by the caller"""

    def __init__(self, document_id: str, kind: str = "CV"):
        self.document_id = document_id
        self.kind = kind
        super().__init__(f"{kind} not found: {document_id}")


class ExportError(CVBoosterError):
    """Serializing a document into an export format failed"""

    def __init__(self, fmt: str, reason: str):
        self.fmt = fmt
        super().__init__(f"Export to {fmt} failed: {reason}")


class UnsupportedFileTypeError(CVBoosterError):
    """An uploaded file has a type the extractor does not accept"""


class AIServiceError(CVBoosterError):
    """The text-generation service failed or returned an unusable answer"""

    def __init__(self, message: str, code: str = "ai_service_error"):
        self.code = code
        super().__init__(message)


class AffiliateError(CVBoosterError):
    """Affiliate program operation failed"""


class InvalidCommissionTransition(AffiliateError):
    """A commission status change is not allowed"""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move commission from {current} to {target}")
