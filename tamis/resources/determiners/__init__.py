from tamis.resources.determiners.determiners import *
