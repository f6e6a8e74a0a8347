"""Utility modules for the chat translator.

This package provides utility functions for logging, content security, language codes,
file handling and string manipulation.
"""

from utils.content_security import CleanedText, ContentSecurity
from utils.file_utils import FileUtils
from utils.language_utils import LanguageUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["CleanedText", "ContentSecurity", "FileUtils", "LanguageUtils", "LoggerUtils", "StringUtils"]
