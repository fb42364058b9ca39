"""DineFlow restaurant point-of-sale backend."""
