"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  text_cleaning - sanitize_input(text): normalizes a transcribed utterance before validation.
                  clean_reply(text): strips markdown and symbols so a reply can be spoken.
"""
