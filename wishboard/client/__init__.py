from wishboard.client.api import BoardAPIError, BoardClient
from wishboard.client.session import ActionState, BoardSession

__all__ = ["ActionState", "BoardAPIError", "BoardClient", "BoardSession"]
