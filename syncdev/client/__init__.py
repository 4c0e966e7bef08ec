"""SyncDev desktop client: reactive state and developer entry points."""
