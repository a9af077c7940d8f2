"""
Application Layer

Services that own the bot's in-memory state and orchestrate the domain
against infrastructure adapters.

Structure:
- services/: voice session manager, plugin registry, batching
- interfaces/: port interfaces for infrastructure adapters
"""
