LIGHT = "Light"
DARK = "Dark"

THEMES = {
    LIGHT: {
        "bg": "#f3f4f6",
        "panel": "#ffffff",
        "text": "#111827",
        "muted": "#6b7280",
        "button": "#e5e7eb",
        "button_hover": "#d1d5db",
        "accent": "#3b82f6",
        "accent_text": "#ffffff",
        "start": "#dcfce7",
        "stop": "#fee2e2",
        "fastest": "#16a34a",
        "slowest": "#dc2626",
        "expired": "#fee2e2",
    },
    DARK: {
        "bg": "#111827",
        "panel": "#1f2937",
        "text": "#f9fafb",
        "muted": "#9ca3af",
        "button": "#374151",
        "button_hover": "#4b5563",
        "accent": "#3b82f6",
        "accent_text": "#ffffff",
        "start": "#14532d",
        "stop": "#7f1d1d",
        "fastest": "#4ade80",
        "slowest": "#f87171",
        "expired": "#7f1d1d",
    },
}
