"""HTML Emailer: safe HTML email template previews and sending through a key-hiding proxy."""

__version__ = "0.1.0"
