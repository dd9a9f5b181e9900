male_titles = {
    "eng": {"mr.", "mr", "mister", "sir", "lord", "king", "prince", "father"},
}

female_titles = {
    "eng": {"miss", "mrs.", "mrs", "ms.", "ms", "lady", "queen", "princess", "sister"},
}

all_titles = {
    key: male_titles[key].union(female_titles[key]) for key in male_titles.keys()
}


def is_a_title(title: str, lang: str = "eng") -> bool:
    try:
        return title.lower() in all_titles[lang]
    except KeyError:
        raise ValueError(
            f"unsupported lang for is_a_title: {lang} (supported langs: {list(all_titles.keys())})"
        )


def is_a_male_title(title: str, lang: str = "eng") -> bool:
    try:
        return title.lower() in male_titles[lang]
    except KeyError:
        raise ValueError(
            f"unsupported lang for is_a_male_title: {lang} (supported langs: {list(male_titles.keys())})"
        )


def is_a_female_title(title: str, lang: str = "eng") -> bool:
    try:
        return title.lower() in female_titles[lang]
    except KeyError:
        raise ValueError(
            f"unsupported lang for is_a_female_title: {lang} (supported langs: {list(female_titles.keys())})"
        )
