"""OneSignal Gateway: forwards notifications, emails and journey updates to OneSignal."""

__version__ = "0.1.0"
