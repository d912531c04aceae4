from .agents import (
    AnalyzeCompleteRequest,
    AnalyzeCompleteResponse,
    CardInfo,
    CardListResponse,
)
from .analysis import (
    AllAnalysesResponse,
    AnalysisResponse,
    SaveAnalysisRequest,
    SingleAnalysisResponse,
)
from .zotero import AttachmentInfo, AttachmentListResponse
from .users import UserCreateRequest, UserEnvelope, UserResponse

__all__ = [
    "AnalyzeCompleteRequest",
    "AnalyzeCompleteResponse",
    "CardInfo",
    "CardListResponse",
    "AllAnalysesResponse",
    "AnalysisResponse",
    "SaveAnalysisRequest",
    "SingleAnalysisResponse",
    "AttachmentInfo",
    "AttachmentListResponse",
    "UserCreateRequest",
    "UserEnvelope",
    "UserResponse",
]
