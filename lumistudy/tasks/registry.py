# Registry of the interactive task types in the battery and the lighting
# conditions the battery is repeated under.
# Each task entry defines metadata used by both the backend and the JS task widgets.

TASK_REGISTRY: dict[str, dict] = {
    "button-click": {
        "label": "Button Click",
        "instruction": "Click the target button",
        "target_instruction": "Click the {target} button",
        "option_sets": [["Cancel", "Submit", "Continue", "Reset"]],
        "repetitions": 2,
    },
    "drag-drop": {
        "label": "Drag and Drop",
        "instruction": "Drag the item to the target zone",
        "target_instruction": "Drag the item to the highlighted target zone",
        "option_sets": [["target-zone"]],
        "repetitions": 1,
    },
    "list-select": {
        "label": "List Selection",
        "instruction": "Select the target item from the list",
        "target_instruction": 'Select "{target}" from the list',
        "option_sets": [
            ["Option A", "Option B", "Option C", "Option D"],
            ["Red", "Green", "Blue", "Yellow", "Purple"],
        ],
        "repetitions": 2,
    },
    "form-input": {
        "label": "Form Input",
        "instruction": "Type the shown sentence exactly and submit",
        "target_instruction": None,
        "option_sets": [],
        "sentences": [
            "bright stars shine above",
            "silent winds move softly",
            "gentle waves touch shore",
            "calm minds think clearly",
        ],
        "repetitions": 1,
    },
    "visual-search": {
        "label": "Visual Search",
        "instruction": "Find and click the target symbol",
        "target_instruction": "Find and click the highlighted target symbol",
        "option_sets": [["●", "■", "▲", "◆", "★", "○", "□", "△", "◇", "☆"]],
        "distractor_counts": [4, 8, 12, 16],
        "repetitions": 2,
    },
    "choice-reaction": {
        "label": "Choice Reaction",
        "instruction": "Press SPACE when the target shape appears",
        "target_instruction": "Press SPACE when the {target} shape appears",
        "option_sets": [["circle", "square", "triangle", "diamond", "star"]],
        "choice_counts": [2, 3, 4, 5],
        "repetitions": 2,
    },
}

# Short id prefix per task type, e.g. "btn-1", "btn-2".
TASK_ID_PREFIXES: dict[str, str] = {
    "button-click": "btn",
    "drag-drop": "drag",
    "list-select": "list",
    "form-input": "form",
    "visual-search": "visual",
    "choice-reaction": "choice",
}

CONDITIONS: list[dict] = [
    {"interface_mode": "light", "room_condition": "bright", "label": "Light Interface / Bright Room"},
    {"interface_mode": "light", "room_condition": "dark", "label": "Light Interface / Dark Room"},
    {"interface_mode": "dark", "room_condition": "bright", "label": "Dark Interface / Bright Room"},
    {"interface_mode": "dark", "room_condition": "dark", "label": "Dark Interface / Dark Room"},
]
