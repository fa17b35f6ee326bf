"""
Permission prompt shown before local fonts are enumerated.
"""
from typing import Optional

from PyQt5.QtWidgets import QCheckBox, QMessageBox, QWidget


class FontAccessPrompt:
    """
    Callable asking the user whether the application may read local fonts.

    Pass an instance as ``confirm`` to FontconfigSource. With "Don't ask
    again this session" ticked, the answer is remembered and the dialog is
    not shown again.
    """

    TITLE = "Local Fonts"
    MESSAGE = "Allow this application to list and read the fonts installed on this computer?"

    def __init__(self, parent: Optional[QWidget] = None):
        self.parent = parent
        self._remembered: Optional[bool] = None

    def __call__(self) -> bool:
        if self._remembered is not None:
            return self._remembered

        msg_box = QMessageBox(self.parent)
        msg_box.setIcon(QMessageBox.Question)
        msg_box.setWindowTitle(self.TITLE)
        msg_box.setText(self.MESSAGE)
        msg_box.setStandardButtons(QMessageBox.Yes | QMessageBox.No)
        msg_box.setDefaultButton(QMessageBox.No)

        dont_ask_checkbox = QCheckBox("Don't ask again this session")
        msg_box.setCheckBox(dont_ask_checkbox)

        allowed = msg_box.exec_() == QMessageBox.Yes
        if dont_ask_checkbox.isChecked():
            self._remembered = allowed
        return allowed

    def reset(self) -> None:
        """Forget a remembered answer."""
        self._remembered = None
