from tendermatch.processor.exceptions import AdapterError, AdapterTimeoutError


class AnalysisError(AdapterError):
    """Raised when AI analysis of document text fails."""


class AnalysisValidationError(AnalysisError):
    """Raised when the AI response fails shape validation."""


class AnalysisNetworkError(AnalysisError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class KeywordGenerationError(AnalysisError):
    """Raised when bilingual keyword generation fails."""


class AnalysisTimeoutError(AnalysisNetworkError, AdapterTimeoutError):
    """Raised when the AI provider does not answer within its client timeout."""
