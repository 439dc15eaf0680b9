"""
Services Layer

Scheduling logic and its persistence seams:
- player_activity / schedule_generator / schedule_mutator are pure (no session)
- schedule_repository / schedule_updates / tournament_service take a Session
- Nothing here depends on HTTP request/response objects
"""
