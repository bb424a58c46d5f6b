"""
finbot - personal finance tracker operated through chat messages

Free-text commands ("gastei R$20 com lanche") are parsed, categorized,
persisted and summarized, with replies sent back to the same conversation.
"""

__version__ = "1.0.0"
