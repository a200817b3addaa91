from .main_window import MainWindow
from .session_widget import SessionWidget
from .post_session_dialog import PostSessionDialog

__all__ = ["MainWindow", "SessionWidget", "PostSessionDialog"]
