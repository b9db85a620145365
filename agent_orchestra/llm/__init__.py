from .completion import Collaborator, LLMCollaborator, message_text
from .litellm_lc import ChatLiteLLMLC
from .response_parser import extract_final_answer
