from .colors import THEMES, LIGHT


def build_stylesheet(theme_name):
    t = THEMES.get(theme_name, THEMES[LIGHT])
    return f"""
        QMainWindow, QWidget {{
            background: {t["bg"]};
            color: {t["text"]};
        }}
        QFrame#panel {{
            background: {t["panel"]};
            border-radius: 10px;
        }}
        QLabel#display {{
            font-family: Consolas, "DejaVu Sans Mono", monospace;
            font-size: 44px;
            font-weight: bold;
            background: transparent;
        }}
        QLabel#display[expired="true"] {{
            background: {t["expired"]};
            border-radius: 8px;
        }}
        QLabel#hint {{
            color: {t["muted"]};
            background: transparent;
        }}
        QPushButton {{
            background: {t["button"]};
            border: none;
            border-radius: 6px;
            padding: 6px 12px;
        }}
        QPushButton:hover {{
            background: {t["button_hover"]};
        }}
        QPushButton:disabled {{
            color: {t["muted"]};
        }}
        QPushButton#modeButton:checked {{
            background: {t["accent"]};
            color: {t["accent_text"]};
        }}
        QPushButton#startButton {{
            background: {t["start"]};
        }}
        QPushButton#startButton[running="true"] {{
            background: {t["stop"]};
        }}
        QTableWidget {{
            background: {t["panel"]};
            border: none;
        }}
        QSpinBox {{
            background: {t["panel"]};
            padding: 4px;
        }}
    """
