class CommonHelper:
    @staticmethod
    def to_dict(obj):
        values = {}
        for field in obj.__dict__.keys():
            if not field.startswith("_"):  # skip private and ORM state attributes
                values[field] = getattr(obj, field)
        return values

    @staticmethod
    def copy_fields(source, target):
        """Overwrites every public attribute of ``target`` that ``source`` carries."""
        for field, value in CommonHelper.to_dict(source).items():
            setattr(target, field, value)
        return target
