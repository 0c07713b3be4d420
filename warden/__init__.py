"""
Warden - Request Authentication Pipeline

Selects the authenticators that apply to an incoming request, verifies
the credentials they extract and installs an authenticated token.

Architecture:
- Each module is self-contained with clear interfaces
- Authenticators and credential checks are replaceable
- Collaborators (users, passwords, remember-me, sessions) plug in through protocols
- Listeners react to outcomes through the event bus

Modules:
- auth: Authenticators, manager, credential verification, firewall facade
- events: Event dispatcher and pipeline events
- audit: Authentication audit trail
- middleware: FastAPI integration
"""

__version__ = "1.0.0"
