"""dora_server — FastAPI REST API for the DORA questionnaire SDK.

Hosts live questionnaire sessions in memory, persists drafts and
submitted forms through ``dora_db``, and hands finished forms to a
webhook-based delivery service.
"""
