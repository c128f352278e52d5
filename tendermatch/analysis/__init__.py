from tendermatch.analysis.base import (
    BaseAnalysisClient,
    BaseKeywordGenerator,
    BaseProfileExtractor,
)
from tendermatch.analysis.factory import AnalysisFactory
from tendermatch.analysis.keyword_generator import KeywordGenerator
from tendermatch.analysis.profile_extractor import ProfileExtractor

__all__ = [
    "AnalysisFactory",
    "BaseAnalysisClient",
    "BaseKeywordGenerator",
    "BaseProfileExtractor",
    "KeywordGenerator",
    "ProfileExtractor",
]
