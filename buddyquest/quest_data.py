"""
Built-in quest catalog.

A three-step tutorial chain at Buddy Base, then one three-quest chain per
zone: Word Forest (language arts), Number Peaks (math), Science Lab and
Teamwork Arena (social skills). Zone entry quests are gated by player
level; later quests by the previous quest of the chain.
"""

from buddyquest.questions import DifficultyTier, Subject
from buddyquest.quests import (
    CompleteChallenges,
    QuestDefinition,
    QuestReward,
    ReachDifficulty,
    TalkToNpc,
    VisitRoom,
)

# Quest accepted automatically for a brand new profile
STARTING_QUEST_ID = "tutorial_start"

# ============================================================================
# Tutorial (Buddy Base)
# ============================================================================

TUTORIAL_QUESTS = [
    QuestDefinition(
        id="tutorial_start",
        name="Welcome, Adventurer!",
        description="Talk to Pip the Guide to learn about Buddy Base.",
        giver_npc_id="guide_pip",
        turn_in_npc_id="guide_pip",
        objectives=(TalkToNpc("guide_pip"),),
        reward=QuestReward(xp_bonus=10),
    ),
    QuestDefinition(
        id="tutorial_first_challenge",
        name="Your First Challenge",
        description="Visit the Word Forest and complete a challenge with Fern.",
        giver_npc_id="guide_pip",
        turn_in_npc_id="guide_pip",
        objectives=(
            VisitRoom("forest_entrance"),
            CompleteChallenges(Subject.LANGUAGE_ARTS, 1),
        ),
        reward=QuestReward(xp_bonus=25),
        prerequisite_quest_ids=("tutorial_start",),
    ),
    QuestDefinition(
        id="tutorial_explore",
        name="Explore the Base",
        description="Visit the Library and the Courtyard to discover what Buddy Base has to offer.",
        giver_npc_id="guide_pip",
        turn_in_npc_id="guide_pip",
        objectives=(VisitRoom("hub_library"), VisitRoom("hub_courtyard")),
        reward=QuestReward(xp_bonus=20, bond_points=5),
        prerequisite_quest_ids=("tutorial_first_challenge",),
    ),
]

# ============================================================================
# Zones
# ============================================================================


def _zone_chain(
    prefix: str,
    subject: Subject,
    *,
    ids: tuple[str, str, str],
    names: tuple[str, str, str],
    descriptions: tuple[str, str, str],
    npcs: tuple[str, str, str],
    room: str,
    entry_prerequisites: tuple[str, ...] = (),
    entry_level: int = 0,
) -> list[QuestDefinition]:
    """Entry, exploration and mastery quest of one zone."""
    entry_id, middle_id, master_id = ids
    return [
        QuestDefinition(
            id=entry_id,
            name=names[0],
            description=descriptions[0],
            giver_npc_id=npcs[0],
            turn_in_npc_id=npcs[0],
            objectives=(CompleteChallenges(subject, 3),),
            reward=QuestReward(xp_bonus=30, unlocks_flag=f"{prefix}_middle_unlocked"),
            prerequisite_quest_ids=entry_prerequisites,
            prerequisite_level=entry_level,
        ),
        QuestDefinition(
            id=middle_id,
            name=names[1],
            description=descriptions[1],
            giver_npc_id=npcs[1],
            turn_in_npc_id=npcs[1],
            objectives=(VisitRoom(room), CompleteChallenges(subject, 3)),
            reward=QuestReward(xp_bonus=40, bond_points=5, unlocks_flag=f"{prefix}_boss_unlocked"),
            prerequisite_quest_ids=(entry_id,),
        ),
        QuestDefinition(
            id=master_id,
            name=names[2],
            description=descriptions[2],
            giver_npc_id=npcs[2],
            turn_in_npc_id=npcs[2],
            objectives=(
                CompleteChallenges(subject, 5),
                ReachDifficulty(subject, DifficultyTier.MEDIUM),
            ),
            reward=QuestReward(xp_bonus=75, bond_points=10, unlocks_flag=f"{prefix}_mastered"),
            prerequisite_quest_ids=(middle_id,),
        ),
    ]


FOREST_QUESTS = _zone_chain(
    "forest",
    Subject.LANGUAGE_ARTS,
    names=("The Beginner's Path", "Deep Woods Discovery", "Master Wordsmith"),
    descriptions=(
        "Complete 3 Language Arts challenges in the Word Forest to prove you're ready "
        "for deeper exploration.",
        "Explore the Deep Woods and complete challenges with Willow the Wise.",
        "Prove your mastery of Language Arts to Elder Oak in the Ancient Grove.",
    ),
    npcs=("forest_sprite", "forest_willow", "forest_guardian"),
    room="forest_deep",
    entry_prerequisites=("tutorial_first_challenge",),
    ids=("forest_beginner_path", "forest_deep_woods", "forest_master_wordsmith"),
)

PEAKS_QUESTS = _zone_chain(
    "peaks",
    Subject.MATH,
    names=("The First Ascent", "The Ridge Trail", "Summit Conquest"),
    descriptions=(
        "Complete 3 Math challenges at Number Peaks Base Camp to begin your climb.",
        "Navigate the Crystal Caverns and prove your math skills to the Crystal Sage.",
        "Reach the Summit and conquer the most challenging math problems.",
    ),
    npcs=("rocky_calcinator", "peaks_crystal_sage", "peaks_summit_keeper"),
    room="peaks_cavern",
    entry_level=3,
    ids=("peaks_beginner_climb", "peaks_ridge_trail", "peaks_summit_conquest"),
)

LAB_QUESTS = _zone_chain(
    "lab",
    Subject.SCIENCE,
    names=("First Experiment", "Research Station", "Master Scientist"),
    descriptions=(
        "Complete 3 Science challenges in the Lab Lobby to earn lab access.",
        "Explore the Research Lab and complete experiments with Dr. Helix.",
        "Complete the ultimate experiment in the Reactor Room with Director Spark.",
    ),
    npcs=("professor_atom", "lab_researcher", "lab_director"),
    room="lab_research",
    entry_level=5,
    ids=("lab_first_experiment", "lab_research_station", "lab_master_scientist"),
)

ARENA_QUESTS = _zone_chain(
    "arena",
    Subject.SOCIAL,
    names=("First Team-Up", "Team Challenge", "Arena Champion"),
    descriptions=(
        "Complete 3 Social challenges in the Arena to show your team spirit.",
        "Prove your teamwork skills in the Training Grounds with Captain Rally.",
        "Become the ultimate team player in the Grand Arena.",
    ),
    npcs=("coach_unity", "arena_captain", "arena_champion_npc"),
    room="arena_training",
    entry_level=2,
    ids=("arena_first_teamup", "arena_team_challenge", "arena_champion"),
)

QUESTS: list[QuestDefinition] = (
    TUTORIAL_QUESTS + FOREST_QUESTS + PEAKS_QUESTS + LAB_QUESTS + ARENA_QUESTS
)

# ============================================================================
# Save Migration Plan
# ============================================================================

TUTORIAL_CHAIN = [quest.id for quest in TUTORIAL_QUESTS]

# First quest of every zone, in the order they open up
ZONE_ENTRY_QUESTS = [
    FOREST_QUESTS[0].id,
    PEAKS_QUESTS[0].id,
    LAB_QUESTS[0].id,
    ARENA_QUESTS[0].id,
]


def quest_by_id(quest_id: str) -> QuestDefinition | None:
    for quest in QUESTS:
        if quest.id == quest_id:
            return quest
    return None
