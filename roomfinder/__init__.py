# Package initializer for the room finder service.

"""
The `roomfinder` package answers "which rooms are free right now?" from a
calendar feed of room bookings.

Modules:

- ``rooms``: room codes, booking intervals and the immutable room directory.
- ``feed_client``: downloading and parsing the calendar feed.
- ``sync``: the shared, swappable handle on the current directory.
- ``availability``: free/known room queries and building grouping.
- ``config``: application settings loaded from environment variables.
- ``models``: Pydantic data models for API responses.
- ``commands``: chat command parsing and replies.
- ``discord_bot``: the Discord chat adapter.
- ``main``: the FastAPI application definition.

"""
