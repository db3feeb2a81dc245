"""vybebot — motor de wizards conversacionais para consultas à Vybe API."""

__version__ = "0.1.0"
