"""
Custom exception hierarchy for the rules engine.

All exceptions inherit from RulesEngineError base class.
"""


class RulesEngineError(Exception):
    """Base exception for all rules engine errors"""
    pass


class DocumentLoadError(RulesEngineError):
    """Error while loading or parsing rule documents"""
    pass


class FileHandlerError(RulesEngineError):
    """Error during file operations"""
    pass


class ConfigurationError(RulesEngineError):
    """Error in configuration"""
    pass
