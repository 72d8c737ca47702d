"""Service layer package housing core business logic.

Contains the document store backends, Firebase auth, habit and log
operations, progress calculations, and the LLM-backed coach, insights
and journal flows. Routes construct services per request.
"""
