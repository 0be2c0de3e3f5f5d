"""
External provider clients.

Responsibilities:
- Query Reddit for city subreddits and text posts.
- Query Google Maps for geocoding, reverse geocoding and nearby places.
- Validate provider payloads once, at the boundary, into typed schemas.
- Space out places calls with a shared rate gate.
"""
