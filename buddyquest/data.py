"""
Learner-facing text for the BuddyQuest learning engine.

This module contains the strings shown by challenge rounds and the quest
log: round tallies, hints, answer labels and progress descriptions.
"""

# ============================================================================
# Round Results
# ============================================================================

ROUND_TALLY = "You got {correct} out of {total} correct!"

ROUND_SCORE = "{correct}/{total}"

# ============================================================================
# Answer Labels
# ============================================================================

TRUE_LABEL = "True"
FALSE_LABEL = "False"

# Shown for a left item the player never paired
UNMATCHED = "?"

PAIR_SEPARATOR = "→"

# ============================================================================
# Hints
# ============================================================================

HINT_FIRST_LETTER = 'I think the answer starts with "{letter}"...'

HINT_GENERIC = "Hmm, I have a feeling about this one!"

HINT_LEANS_TRUE = "I think this statement might be right..."

HINT_LEANS_FALSE = "Something about this doesn't seem quite right..."

HINT_FIRST_ITEM = 'I think "{item}" goes first...'

HINT_FIRST_PAIR = 'I think "{left}" matches with "{right}"...'

# Correct options this short get the generic hint instead of a first letter
HINT_MIN_ANSWER_LENGTH = 3

# ============================================================================
# Quest Log
# ============================================================================

OBJECTIVE_TALK = "Talk to {npc}"
OBJECTIVE_VISIT = "Visit {room}"
OBJECTIVE_CHALLENGES = "Complete {count} {subject} challenges"
OBJECTIVE_DIFFICULTY = "Reach {tier} difficulty in {subject}"
OBJECTIVE_LEVEL = "Reach level {level}"

OBJECTIVE_DONE_MARK = "[x]"
OBJECTIVE_OPEN_MARK = "[ ]"
