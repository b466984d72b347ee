"""
                        Services Module

Contains the business logic behind the HTTP layer.
Notification delivery has Mock (development) and Real (production) implementations.

Services:
    - auth: OTP issuance, verification, session tokens and the authorization gate
    - menu: Restaurants, categories and dishes
    - notifications: SendGrid email delivery with a log-only fallback
    - results: Typed service outcomes
"""
