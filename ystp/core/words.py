"""
口令词表 - 用于生成会话口令的固定有序词表

词表只包含小写ASCII字母，不含分隔符，便于口头传达和输入。
"""

WORDS = (
    "acid", "acorn", "actor", "adobe", "agent", "album", "alley", "amber",
    "anchor", "angle", "ankle", "apple", "apron", "arena", "arrow", "atlas",
    "attic", "award", "bacon", "badge", "bagel", "baker", "banjo", "barn",
    "basil", "beach", "beard", "berry", "bison", "blade", "blaze", "bloom",
    "board", "boat", "bonus", "boots", "brick", "bridge", "brook", "brush",
    "bucket", "bugle", "cabin", "cable", "cactus", "camel", "canal", "candy",
    "canoe", "cargo", "carrot", "castle", "cedar", "chalk", "charm", "cherry",
    "chess", "cider", "cinema", "circle", "cliff", "clock", "cloud", "clover",
    "coast", "cobra", "comet", "coral", "cotton", "crane", "crayon", "cricket",
    "crown", "cube", "daisy", "dance", "delta", "denim", "desert", "diary",
    "dingo", "dolphin", "donkey", "dragon", "dream", "drum", "eagle", "easel",
    "echo", "elbow", "ember", "engine", "fabric", "falcon", "feather", "fence",
    "ferry", "fiddle", "field", "flame", "flute", "forest", "fossil", "fox",
    "frost", "galaxy", "garden", "garlic", "gecko", "ginger", "glacier", "globe",
    "goose", "grape", "gravel", "guitar", "hammer", "harbor", "hazel", "hedge",
    "helmet", "heron", "hippo", "honey", "horizon", "husky", "igloo", "island",
    "ivory", "jacket", "jaguar", "jelly", "jigsaw", "jungle", "kayak", "kettle",
    "kiwi", "koala", "ladder", "lagoon", "lemon", "lentil", "letter", "lily",
    "lizard", "llama", "lobster", "locket", "lotus", "lunar", "magnet", "mango",
    "maple", "marble", "meadow", "melon", "meteor", "mint", "mirror", "monkey",
    "moose", "mosaic", "muffin", "nectar", "needle", "nest", "noodle", "oasis",
    "ocean", "olive", "onion", "orbit", "orchid", "otter", "owl", "paddle",
    "panda", "paper", "parrot", "peach", "pebble", "pepper", "piano", "pickle",
    "pigeon", "pilot", "planet", "plum", "pony", "prism", "puffin", "pumpkin",
    "quartz", "quill", "rabbit", "radar", "radish", "raven", "reef", "ribbon",
    "river", "robin", "rocket", "saddle", "salmon", "satin", "scarf", "shell",
    "silver", "sketch", "sloth", "snail", "sonnet", "spider", "spruce", "squid",
    "stable", "statue", "stone", "sugar", "summit", "swan", "tablet", "tango",
    "temple", "thistle", "thunder", "tiger", "timber", "tomato", "topaz", "torch",
    "tulip", "tundra", "turtle", "umbrella", "valley", "velvet", "violin", "volcano",
    "wagon", "walnut", "walrus", "wave", "willow", "window", "winter", "wizard",
    "yacht", "yogurt", "zebra", "zenith", "zephyr", "zinc", "zipper", "zucchini",
)
