"""Watch Market - Serverless Handlers"""
