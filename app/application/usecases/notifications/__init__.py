from .send_welcome import WELCOME_WORKFLOW, SendWelcomeEmailUseCase

__all__ = ["SendWelcomeEmailUseCase", "WELCOME_WORKFLOW"]
