from .parser import MessageParser, ParsedMessage, parse_message

__all__ = ["MessageParser", "ParsedMessage", "parse_message"]
