"""Client module - Offline link, queue engine, storage and transport."""
