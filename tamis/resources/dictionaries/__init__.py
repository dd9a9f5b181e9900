from tamis.resources.dictionaries.dictionaries import CorefDictionaries
