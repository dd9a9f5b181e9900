from tamis.resources.titles.titles import *
