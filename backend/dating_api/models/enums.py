import enum


class Role(str, enum.Enum):
    man = "man"
    woman = "woman"


class Gender(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"
