"""Model adapter: one contract over the supported AI backends."""
