"""
Dark stylesheet for the entire application.
Charcoal-and-graphite palette so reference photos stay the brightest thing on screen.
"""

DARK_STYLESHEET = """
/* ── Base ────────────────────────────────────────────────────────── */
QWidget {
    background-color: #1b1b1d;
    color: #e4e1dc;
    font-family: "Segoe UI", "Inter", sans-serif;
    font-size: 13px;
}

/* ── Buttons ─────────────────────────────────────────────────────── */
QPushButton {
    background-color: #2c2c30;
    color: #e4e1dc;
    border: 1px solid #4a4a50;
    border-radius: 6px;
    padding: 7px 16px;
    font-weight: 600;
}

QPushButton:hover {
    border-color: #d9a35b;
}

QPushButton:disabled {
    background-color: #18181a;
    color: #55555b;
    border-color: #2c2c30;
}

QPushButton#primary {
    background-color: #d9a35b;
    color: #1b1b1d;
    border: none;
}

QPushButton#danger {
    background-color: #d96b5b;
    color: #1b1b1d;
    border: none;
}

/* ── Inputs ──────────────────────────────────────────────────────── */
QLineEdit, QComboBox, QSpinBox, QDateEdit {
    background-color: #2c2c30;
    color: #e4e1dc;
    border: 1px solid #4a4a50;
    border-radius: 5px;
    padding: 4px 8px;
}

QListWidget, QTableWidget {
    background-color: #232326;
    border: 1px solid #34343a;
    border-radius: 6px;
    selection-background-color: #3d3a34;
}

/* ── Labels ──────────────────────────────────────────────────────── */
QLabel {
    background: transparent;
}

QLabel#title {
    font-size: 20px;
    font-weight: 700;
    color: #d9a35b;
}

QLabel#subtitle {
    font-size: 14px;
    color: #a5a29c;
}

QLabel#timer {
    font-size: 40px;
    font-weight: 700;
    font-family: "Consolas", "Courier New", monospace;
    color: #f2d29b;
}

QLabel#photo_view {
    background-color: #101011;
    border-radius: 6px;
    color: #6b6b70;
}

/* ── Tabs ────────────────────────────────────────────────────────── */
QTabBar::tab {
    background-color: #141415;
    color: #a5a29c;
    padding: 9px 18px;
    font-weight: 600;
}

QTabBar::tab:selected {
    color: #d9a35b;
    border-bottom: 2px solid #d9a35b;
}

/* ── Progress ────────────────────────────────────────────────────── */
QProgressBar {
    background-color: #2c2c30;
    border-radius: 3px;
    max-height: 8px;
}

QProgressBar::chunk {
    background-color: #d9a35b;
    border-radius: 3px;
}
"""
