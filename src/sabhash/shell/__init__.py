from .interpreter import CommandInterpreter, SessionStats, format_keys, run_session

__all__ = ["CommandInterpreter", "SessionStats", "format_keys", "run_session"]
