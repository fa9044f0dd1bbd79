"""
Bundled static question catalog.

Offline content used to seed a learner's bank on first run and to top up
replenishment when generated content falls short. Every subject carries at
least five multiple-choice questions per difficulty tier, plus a handful of
true/false, ordering and matching questions for mixed rounds. Math
multiple-choice content comes from the arithmetic engine with a fixed seed,
so the catalog is identical on every run.
"""

import random

from buddyquest.math_questions import generate_question_set
from buddyquest.questions import (
    DifficultyTier,
    GradeLevel,
    Matching,
    MultipleChoice,
    Ordering,
    Question,
    QuestionType,
    Subject,
    TrueFalse,
)

# Seed for the generated math part of the catalog
CATALOG_SEED = 20240601

# Math questions generated per tier for the catalog
MATH_CATALOG_PER_TIER = 6

# Grade level assumed for catalog content of each tier
TIER_GRADE_LEVELS: dict[DifficultyTier, GradeLevel] = {
    DifficultyTier.BEGINNER: GradeLevel.FIRST,
    DifficultyTier.EASY: GradeLevel.SECOND,
    DifficultyTier.MEDIUM: GradeLevel.THIRD,
    DifficultyTier.HARD: GradeLevel.FOURTH,
    DifficultyTier.ADVANCED: GradeLevel.FIFTH,
}

# Short prefixes used in catalog question IDs
SUBJECT_ID_PREFIXES: dict[Subject, str] = {
    Subject.LANGUAGE_ARTS: "ela",
    Subject.MATH: "math",
    Subject.SCIENCE: "sci",
    Subject.SOCIAL: "soc",
}

B = DifficultyTier.BEGINNER
E = DifficultyTier.EASY
M = DifficultyTier.MEDIUM
H = DifficultyTier.HARD
A = DifficultyTier.ADVANCED

# ============================================================================
# Multiple Choice: (text, options, correct index, explanation)
# ============================================================================

LANGUAGE_ARTS_MULTIPLE_CHOICE: dict[DifficultyTier, list[tuple]] = {
    B: [
        ("Which word rhymes with 'cat'?", ("dog", "bat", "cup", "sun"), 1,
         "'Bat' and 'cat' both end with '-at'!"),
        ("Which word is a noun?", ("run", "happy", "tree", "quickly"), 2,
         "A noun is a person, place, or thing. 'Tree' is a thing!"),
        ("What letter does 'apple' start with?", ("B", "A", "C", "D"), 1,
         "'Apple' starts with the letter A!"),
        ("Which word rhymes with 'sun'?", ("fun", "sit", "cap", "log"), 0,
         "'Fun' and 'sun' both end with '-un'."),
        ("How many letters are in the word 'dog'?", ("2", "3", "4", "5"), 1,
         "D-O-G has three letters."),
    ],
    E: [
        ("What is the opposite of 'hot'?", ("warm", "cold", "big", "wet"), 1,
         "Hot and cold are opposites."),
        ("Which word is a verb?", ("jump", "blue", "chair", "soft"), 0,
         "A verb is an action word. You can jump!"),
        ("What is the plural of 'box'?", ("boxs", "boxes", "boxies", "boxen"), 1,
         "Words ending in 'x' add '-es': boxes."),
        ("Which sentence is a question?",
         ("I like cats.", "Do you like cats?", "Cats are fun!", "My cat sleeps."), 1,
         "Questions end with a question mark."),
        ("Which word means the same as 'big'?", ("tiny", "large", "slow", "quiet"), 1,
         "'Large' is a synonym for 'big'."),
    ],
    M: [
        ("Which word is an adjective in 'The red ball bounced'?",
         ("The", "red", "ball", "bounced"), 1,
         "'Red' describes the ball, so it is an adjective."),
        ("What is the past tense of 'run'?", ("runned", "ran", "running", "runs"), 1,
         "'Run' is irregular: today I run, yesterday I ran."),
        ("Which word is a synonym for 'happy'?", ("sad", "glad", "mad", "tired"), 1,
         "'Glad' means almost the same as 'happy'."),
        ("What is the contraction of 'do not'?", ("don't", "doesn't", "didn't", "dont"), 0,
         "The apostrophe replaces the 'o' in 'not': don't."),
        ("Which word has a prefix?", ("unhappy", "table", "garden", "yellow"), 0,
         "'Un-' is a prefix meaning 'not'."),
    ],
    H: [
        ("What is the main idea of a paragraph?",
         ("Its first word", "What it is mostly about", "Its longest sentence", "The book title"), 1,
         "The main idea is what the paragraph is mostly about."),
        ("Which is a compound word?", ("sunflower", "running", "quickly", "beautiful"), 0,
         "'Sunflower' joins 'sun' and 'flower'."),
        ("In 'She sang beautifully', which word is an adverb?",
         ("She", "sang", "beautifully", "none of them"), 2,
         "'Beautifully' tells how she sang."),
        ("Which word sounds the same as 'their'?", ("there", "three", "them", "these"), 0,
         "'There' and 'their' are homophones."),
        ("What does '-less' mean in 'fearless'?", ("full of", "without", "again", "before"), 1,
         "Fearless means without fear."),
    ],
    A: [
        ("Which sentence uses a metaphor?",
         ("The classroom was a zoo.", "The dog barked loudly.",
          "She runs like the wind.", "It rained all day."), 0,
         "A metaphor says one thing is another, without 'like' or 'as'."),
        ("What is the antonym of 'generous'?", ("kind", "selfish", "giving", "friendly"), 1,
         "Selfish is the opposite of generous."),
        ("Which word is spelled correctly?",
         ("neccessary", "necessary", "necesary", "nesessary"), 1,
         "Necessary has one 'c' and two 's's."),
        ("What is the purpose of a persuasive essay?",
         ("To entertain", "To convince the reader", "To describe a place", "To list facts"), 1,
         "Persuasive writing tries to convince the reader."),
        ("Which sentence is in the passive voice?",
         ("The cake was eaten by Sam.", "Sam ate the cake.", "Sam is eating.", "Sam will eat cake."), 0,
         "In the passive voice the subject receives the action."),
    ],
}

SCIENCE_MULTIPLE_CHOICE: dict[DifficultyTier, list[tuple]] = {
    B: [
        ("What do plants need to grow?", ("Candy", "Sunlight", "Toys", "Sand"), 1,
         "Plants use sunlight to make their food."),
        ("Which animal can fly?", ("Dog", "Fish", "Bird", "Cow"), 2,
         "Birds use their wings to fly."),
        ("What do we use to see?", ("Ears", "Eyes", "Nose", "Hands"), 1,
         "We see with our eyes."),
        ("What is frozen water called?", ("Steam", "Ice", "Juice", "Rain"), 1,
         "Water freezes into ice."),
        ("Which season is usually the coldest?", ("Summer", "Spring", "Winter", "Fall"), 2,
         "Winter is the coldest season."),
    ],
    E: [
        ("What gas do we need to breathe?", ("Oxygen", "Helium", "Smoke", "Steam"), 0,
         "Our lungs take oxygen from the air."),
        ("How many legs does an insect have?", ("4", "6", "8", "10"), 1,
         "All insects have six legs."),
        ("What is the closest star to Earth?", ("The Moon", "The Sun", "Mars", "The North Star"), 1,
         "The Sun is a star, and it is the closest one to us."),
        ("What do caterpillars turn into?", ("Bees", "Butterflies", "Spiders", "Worms"), 1,
         "Caterpillars become butterflies or moths."),
        ("Which of these is a mammal?", ("Shark", "Whale", "Frog", "Lizard"), 1,
         "Whales breathe air and feed milk to their babies."),
    ],
    M: [
        ("What are the three states of matter?",
         ("Hot, warm, cold", "Solid, liquid, gas", "Big, medium, small", "Rock, paper, water"), 1,
         "Matter can be a solid, a liquid, or a gas."),
        ("Which part of a plant makes its food?", ("Roots", "Stem", "Leaves", "Flowers"), 2,
         "Leaves capture sunlight to make food."),
        ("What force pulls objects toward Earth?", ("Magnetism", "Gravity", "Friction", "Wind"), 1,
         "Gravity pulls everything toward the ground."),
        ("Which planet is known as the Red Planet?", ("Venus", "Jupiter", "Mars", "Saturn"), 2,
         "Mars looks red because of rusty dust."),
        ("What do we call animals that eat only plants?",
         ("Carnivores", "Herbivores", "Omnivores", "Predators"), 1,
         "Herbivores eat plants."),
    ],
    H: [
        ("What is it called when water turns into vapor?",
         ("Condensation", "Evaporation", "Precipitation", "Freezing"), 1,
         "Evaporation turns liquid water into water vapor."),
        ("Which organ pumps blood through the body?", ("Lungs", "Brain", "Heart", "Stomach"), 2,
         "The heart pumps blood."),
        ("What is the center of an atom called?", ("Electron", "Nucleus", "Shell", "Molecule"), 1,
         "The nucleus sits at the center of an atom."),
        ("What type of rock forms from cooled lava?",
         ("Sedimentary", "Igneous", "Metamorphic", "Limestone"), 1,
         "Igneous rock forms when melted rock cools."),
        ("Plants take in which gas from the air?",
         ("Oxygen", "Carbon dioxide", "Nitrogen", "Helium"), 1,
         "Plants use carbon dioxide to make food."),
    ],
    A: [
        ("Which part of the cell releases energy?",
         ("Nucleus", "Mitochondria", "Cell wall", "Ribosome"), 1,
         "Mitochondria are the powerhouse of the cell."),
        ("What is the chemical formula for water?", ("CO2", "H2O", "O2", "NaCl"), 1,
         "Water is two hydrogen atoms and one oxygen atom."),
        ("Which layer of Earth is the hottest?",
         ("Crust", "Mantle", "Outer core", "Inner core"), 3,
         "The inner core is the hottest layer."),
        ("What is photosynthesis?",
         ("How plants make food from light", "How animals breathe",
          "How rocks form", "How water freezes"), 0,
         "Photosynthesis turns light, water and carbon dioxide into food."),
        ("Sound travels fastest through which material?", ("Air", "Water", "Steel", "Empty space"), 2,
         "Sound moves fastest through solids like steel."),
    ],
}

SOCIAL_MULTIPLE_CHOICE: dict[DifficultyTier, list[tuple]] = {
    B: [
        ("What do you say when someone gives you a gift?",
         ("Go away", "Thank you", "I want more", "Nothing"), 1,
         "Saying thank you shows you appreciate the gift."),
        ("What can you do if a friend is sad?",
         ("Laugh at them", "Ask if they are okay", "Walk away", "Take their toy"), 1,
         "Checking in shows you care."),
        ("When someone is talking, you should...", ("Interrupt", "Listen", "Shout", "Leave"), 1,
         "Listening is a kind way to show respect."),
        ("What is a good way to share a toy?", ("Keep it all day", "Take turns", "Hide it", "Break it"), 1,
         "Taking turns lets everyone play."),
        ("What do you say if you bump into someone?", ("Sorry", "Move", "Whatever", "Ha ha"), 0,
         "Saying sorry shows you care about others."),
    ],
    E: [
        ("Your friend wants a different game than you. What can you do?",
         ("Refuse to play", "Take turns choosing", "Go home angry", "Tell on them"), 1,
         "Taking turns choosing is fair to both of you."),
        ("What does it mean to be honest?",
         ("Telling the truth", "Keeping secrets", "Being fast", "Winning games"), 0,
         "Honest people tell the truth."),
        ("A new student has no one to sit with. What could you do?",
         ("Ignore them", "Invite them to sit with you", "Laugh", "Tell them to leave"), 1,
         "Inviting them helps them feel welcome."),
        ("How can you show you are listening?",
         ("Look at the speaker", "Look at the floor", "Play a game", "Talk over them"), 0,
         "Looking at the speaker shows you are paying attention."),
        ("What is a good thing to do when you feel angry?",
         ("Yell", "Take deep breaths", "Throw things", "Hit someone"), 1,
         "Deep breaths help your body calm down."),
    ],
    M: [
        ("What does empathy mean?",
         ("Understanding how others feel", "Being the best", "Playing alone", "Following rules"), 0,
         "Empathy is understanding and sharing someone else's feelings."),
        ("Your team lost a game. What is good sportsmanship?",
         ("Blame others", "Congratulate the winners", "Quit the team", "Cry loudly"), 1,
         "Good sports congratulate the other team."),
        ("What should you do if you see someone being bullied?",
         ("Join in", "Tell a trusted adult", "Ignore it", "Record a video"), 1,
         "A trusted adult can help stop bullying."),
        ("What is a compromise?",
         ("Both sides give a little", "One person always wins", "Nobody talks", "Giving up"), 0,
         "In a compromise both sides give a little to agree."),
        ("How can you be a good teammate?",
         ("Cheer others on", "Keep the ball", "Only play with best friends", "Argue about rules"), 0,
         "Good teammates help and encourage each other."),
    ],
    H: [
        ("Two friends disagree. What is the best first step?",
         ("Pick a side", "Listen to both", "Walk away forever", "Tell everyone"), 1,
         "Listening to both sides helps you understand the problem."),
        ("What is peer pressure?",
         ("Others pushing you to do something", "Pressure in your ears", "A type of game", "Homework help"), 0,
         "Peer pressure is when people your age push you to act a certain way."),
        ("Which is an 'I statement'?",
         ("I feel upset when I'm interrupted.", "You always interrupt!", "Stop talking!", "Nobody listens."), 0,
         "'I statements' describe your own feelings without blaming."),
        ("Why is it important to respect differences?",
         ("Everyone is unique and valuable", "So you can win", "It is not important", "To get presents"), 0,
         "Respecting differences helps everyone feel valued."),
        ("What does it mean to be responsible?",
         ("Doing what you said you would", "Blaming others", "Forgetting tasks", "Waiting for others"), 0,
         "Responsible people keep their promises."),
    ],
    A: [
        ("A classmate spreads a rumor about your friend. What is the best response?",
         ("Spread it further", "Refuse to repeat it and check on your friend",
          "Add to the story", "Laugh along"), 1,
         "Stopping the rumor and supporting your friend is the kind choice."),
        ("What is active listening?",
         ("Responding to show you understand", "Listening while running",
          "Waiting for your turn to talk", "Hearing only the first part"), 0,
         "Active listeners show they understand what was said."),
        ("What is a good way to settle a group project conflict?",
         ("Let one person do everything", "Divide tasks fairly and discuss",
          "Quit the group", "Complain to others"), 1,
         "Sharing work fairly and talking it through solves conflicts."),
        ("What does it mean to be inclusive?",
         ("Making sure everyone feels welcome", "Picking only friends",
          "Keeping a club secret", "Always being the leader"), 0,
         "Inclusive people make room for everyone."),
        ("How can you show gratitude to a teacher?",
         ("Write a thank-you note", "Ignore them", "Skip class", "Complain"), 0,
         "A thank-you note shows appreciation."),
    ],
}

# ============================================================================
# True/False, Ordering and Matching
# ============================================================================

# (tier, text, correct answer, explanation)
TRUE_FALSE: dict[Subject, list[tuple]] = {
    Subject.MATH: [
        (B, "A triangle has 4 sides.", False, "A triangle has exactly 3 sides."),
        (E, "All squares are rectangles.", True,
         "A square has 4 right angles and opposite sides equal."),
        (M, "An even number plus an even number is always even.", True,
         "Adding two even numbers always gives an even number."),
    ],
    Subject.LANGUAGE_ARTS: [
        (B, "A sentence can end with a comma.", False,
         "Sentences end with a period, question mark, or exclamation point."),
        (E, "'Happy' and 'glad' mean almost the same thing.", True,
         "They are synonyms."),
        (M, "The word 'quickly' is an adjective.", False,
         "'Quickly' describes how something is done, so it is an adverb."),
    ],
    Subject.SCIENCE: [
        (B, "The Sun is a star.", True, "The Sun is the star at the center of our solar system."),
        (E, "Spiders are insects.", False, "Spiders have 8 legs, so they are arachnids."),
        (M, "Sound can travel through water.", True, "Sound travels through water even faster than air."),
    ],
    Subject.SOCIAL: [
        (B, "It is okay to ask for help when you need it.", True,
         "Everyone needs help sometimes."),
        (E, "Interrupting is a polite way to join a conversation.", False,
         "Waiting for a pause is the polite way to join in."),
        (M, "Feeling nervous before something new is normal.", True,
         "Lots of people feel nervous when trying new things."),
    ],
}

# (tier, text, items in display order, correct order, explanation)
ORDERING: dict[Subject, list[tuple]] = {
    Subject.MATH: [
        (B, "Order these numbers from smallest to largest.",
         ("52", "25", "5", "205"), (2, 1, 0, 3), "5 < 25 < 52 < 205."),
        (E, "Order these units from smallest to largest.",
         ("meter", "centimeter", "kilometer", "millimeter"), (3, 1, 0, 2),
         "millimeter < centimeter < meter < kilometer."),
        (M, "Order these fractions from smallest to largest.",
         ("1/2", "1/4", "3/4", "1/8"), (3, 1, 0, 2), "1/8 < 1/4 < 1/2 < 3/4."),
    ],
    Subject.LANGUAGE_ARTS: [
        (E, "Put these words in alphabetical order.",
         ("dog", "apple", "cat", "banana"), (1, 3, 2, 0), "apple, banana, cat, dog."),
        (M, "Put the story events in order.",
         ("She ate breakfast.", "She woke up.", "She went to school."), (1, 0, 2),
         "First she woke up, then ate breakfast, then went to school."),
    ],
    Subject.SCIENCE: [
        (E, "Order these planets from closest to farthest from the Sun.",
         ("Earth", "Mercury", "Mars", "Venus"), (1, 3, 0, 2), "Mercury, Venus, Earth, Mars."),
        (M, "Order the life cycle of a butterfly.",
         ("Butterfly", "Egg", "Chrysalis", "Caterpillar"), (1, 3, 2, 0),
         "Egg, caterpillar, chrysalis, butterfly."),
    ],
    Subject.SOCIAL: [
        (E, "Put the steps for calming down in order.",
         ("Talk about how you feel", "Stop", "Take a deep breath"), (1, 2, 0),
         "Stop, breathe, then talk about it."),
    ],
}

# (tier, text, left items, right items, correct mapping, explanation)
MATCHING: dict[Subject, list[tuple]] = {
    Subject.MATH: [
        (E, "Match each equation to its answer.",
         ("3 × 4", "7 + 8", "20 - 6", "9 × 3"), ("27", "14", "15", "12"), (3, 2, 1, 0),
         "3×4=12, 7+8=15, 20-6=14, 9×3=27."),
        (M, "Match each shape to its number of sides.",
         ("Triangle", "Square", "Pentagon", "Hexagon"), ("5", "6", "3", "4"), (2, 3, 0, 1),
         "Triangle=3, Square=4, Pentagon=5, Hexagon=6 sides."),
    ],
    Subject.LANGUAGE_ARTS: [
        (E, "Match each word to its opposite.",
         ("hot", "up", "big"), ("down", "small", "cold"), (2, 0, 1),
         "hot/cold, up/down, big/small."),
    ],
    Subject.SCIENCE: [
        (B, "Match each animal to its home.",
         ("Bird", "Fish", "Bee"), ("Hive", "Nest", "Ocean"), (1, 2, 0),
         "Birds live in nests, fish in the ocean, bees in hives."),
    ],
    Subject.SOCIAL: [
        (M, "Match each feeling to a helpful action.",
         ("Sad", "Angry", "Nervous"), ("Take deep breaths", "Practice first", "Talk to a friend"),
         (2, 0, 1), "Talking helps sadness, breathing calms anger, practice eases nerves."),
    ],
}

_MULTIPLE_CHOICE_TABLES: dict[Subject, dict[DifficultyTier, list[tuple]]] = {
    Subject.LANGUAGE_ARTS: LANGUAGE_ARTS_MULTIPLE_CHOICE,
    Subject.SCIENCE: SCIENCE_MULTIPLE_CHOICE,
    Subject.SOCIAL: SOCIAL_MULTIPLE_CHOICE,
}


def _multiple_choice(subject: Subject) -> list[Question]:
    prefix = SUBJECT_ID_PREFIXES[subject]
    questions = []
    for tier, entries in _MULTIPLE_CHOICE_TABLES[subject].items():
        for number, (text, options, correct_index, explanation) in enumerate(entries, start=1):
            questions.append(
                Question(
                    id=f"{prefix}_{tier.name.lower()}_{number:02d}",
                    text=text,
                    payload=MultipleChoice(options=options, correct_index=correct_index),
                    explanation=explanation,
                    subject=subject,
                    difficulty=tier,
                    grade_level=TIER_GRADE_LEVELS[tier],
                )
            )
    return questions


def _math_multiple_choice() -> list[Question]:
    rng = random.Random(CATALOG_SEED)
    questions = []
    seen: set[str] = set()
    for tier in DifficultyTier:
        # IDs are shared between tiers (math_mul_2_5 is valid at medium and hard)
        generated = generate_question_set(
            MATH_CATALOG_PER_TIER, tier=tier, exclude_ids=seen, rng=rng
        )
        seen.update(question.id for question in generated)
        questions.extend(generated)
    return questions


def _other_types(subject: Subject) -> list[Question]:
    prefix = SUBJECT_ID_PREFIXES[subject]
    questions = []

    for number, (tier, text, answer, explanation) in enumerate(TRUE_FALSE.get(subject, []), 1):
        questions.append(
            Question(
                id=f"{prefix}_tf_{number:02d}",
                text=text,
                payload=TrueFalse(correct_answer=answer),
                explanation=explanation,
                subject=subject,
                difficulty=tier,
                grade_level=TIER_GRADE_LEVELS[tier],
            )
        )

    for number, (tier, text, items, order, explanation) in enumerate(ORDERING.get(subject, []), 1):
        questions.append(
            Question(
                id=f"{prefix}_order_{number:02d}",
                text=text,
                payload=Ordering(items=items, correct_order=order),
                explanation=explanation,
                subject=subject,
                difficulty=tier,
                grade_level=TIER_GRADE_LEVELS[tier],
            )
        )

    for number, (tier, text, left, right, mapping, explanation) in enumerate(
        MATCHING.get(subject, []), 1
    ):
        questions.append(
            Question(
                id=f"{prefix}_match_{number:02d}",
                text=text,
                payload=Matching(left_items=left, right_items=right, correct_mapping=mapping),
                explanation=explanation,
                subject=subject,
                difficulty=tier,
                grade_level=TIER_GRADE_LEVELS[tier],
            )
        )

    return questions


def _build_catalog() -> dict[Subject, list[Question]]:
    catalog = {}
    for subject in Subject:
        if subject == Subject.MATH:
            questions = _math_multiple_choice()
        else:
            questions = _multiple_choice(subject)
        catalog[subject] = questions + _other_types(subject)
    return catalog


_CATALOG = _build_catalog()


def static_questions(subject: Subject) -> list[Question]:
    """All catalog questions of a subject, every tier and type."""
    return list(_CATALOG[subject])


def static_questions_for(
    subject: Subject,
    tier: DifficultyTier,
    question_type: QuestionType | None = None,
) -> list[Question]:
    """Catalog questions of a subject at one tier, optionally of one type."""
    return [
        question
        for question in _CATALOG[subject]
        if question.difficulty == tier
        and (question_type is None or question.question_type == question_type)
    ]
