"""Declarations of the text trees of the supported entities.

Importing this package registers every entity below with
ezxlate.core.entity.register_entity().
"""

from . import course, section, question, tag, quiz, questionnaire, stickynotes
