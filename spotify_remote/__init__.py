"""Terminal remote control for Spotify playback."""
