"""
Neighborhood recommendation pipeline.

Responsibilities:
- Discover city subreddits and collect topical posts.
- Filter posts for relevance and extract amenity needs from free text.
- Locate amenities, attribute them to neighborhoods and score the neighborhoods.
- Attach qualitative scores and concerns, then assemble the map-ready response.
"""
