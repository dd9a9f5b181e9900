#: determiners that can be stripped from the start of a mention
#: when comparing mention strings
leading_determiners = {
    "eng": frozenset({"the", "a", "an", "this", "that", "these", "those"}),
}

singular_determiners = {
    "eng": frozenset({"a", "an", "this", "that", "each", "every", "another", "one"}),
}

plural_determiners = {
    "eng": frozenset({"these", "those", "both", "many", "several", "few", "two"}),
}

indefinite_determiners = {
    "eng": frozenset({"a", "an", "some", "any", "another", "no"}),
}
