from tamis.resources.pronouns.pronouns import *
