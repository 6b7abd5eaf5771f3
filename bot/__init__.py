"""
Discord client, configuration and status server for the guild bot.
"""
