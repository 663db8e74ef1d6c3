"""API v1 routers.

Resources:
    /streams/{domain}                                  - Domain broadcast stream
    /streams/{domain}/{identifier}                     - Entity stream
    /streams/{domain}/{identifier}/events/{event_name} - Event stream

The application factory mounts these under settings.api_v1_prefix.
"""
