"""
CalmDrafts - keeps the Gmail drafts folder tidy
"""

APP_NAME = "CalmDrafts"
