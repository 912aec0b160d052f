FRONTIER_NAMES = (
    "Aldric",
    "Bryn",
    "Cato",
    "Dagny",
    "Edda",
    "Falk",
    "Greer",
    "Hale",
    "Ilse",
    "Jory",
    "Kestrel",
    "Lorne",
    "Maren",
    "Nils",
    "Orla",
    "Pell",
    "Quill",
    "Rook",
    "Sabine",
    "Tamsin",
    "Ulric",
    "Vesna",
    "Wren",
    "Yara",
)
