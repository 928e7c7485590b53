"""
Backend RiskLab: payment fraud risk scoring for suspicious payment messages.

Scores emails, chats, and voice transcripts for business-email-compromise,
impersonation, and social-engineering payment redirection. Combines a
rule-based heuristic engine with an external semantic classifier and keeps
an append-only history of every scored request.
"""

__version__ = "0.1.0"
